"""Stings account and subscription backend."""
