"""
Модуль config - Настройки и константы AHA Time-Locked Ledger
"""
