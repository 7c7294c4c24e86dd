"""Exchanges bounded context: port, value objects and errors of an exchange account."""
