"""Accounts: users, roles, password hashing and permission rules."""
