"""Identifiers, errors and binary layouts for clients of a TEE and its PKCS#11 trusted application."""

__version__ = "0.1.0"