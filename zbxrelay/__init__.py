"""Zabbix → Telegram webhook relay with PROBLEM/RESOLVED event correlation."""

__version__ = "0.1.0"
