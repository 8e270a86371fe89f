"""API Schema 套件"""
