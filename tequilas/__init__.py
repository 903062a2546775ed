"""
                Tequilas Restaurant Ordering

Backend for a two-sided restaurant ordering app: a storefront where
customers browse the menu and place orders, and an admin back-office for
the catalog and daily sales.

Author: Khalil_Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil_Bannouri"
