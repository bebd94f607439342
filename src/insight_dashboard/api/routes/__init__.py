"""
API 路由
"""
