"""持久層 REST API 路由套件"""
