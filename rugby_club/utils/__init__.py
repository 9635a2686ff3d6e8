"""Utility modules"""
from rugby_club.utils.retry import retry_on_connection_error
from rugby_club.utils.validators import FieldValidators

__all__ = ['retry_on_connection_error', 'FieldValidators']
