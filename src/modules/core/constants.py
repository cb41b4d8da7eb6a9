"""Limits shared by every slip kind."""

MAX_SLIP_ORDERS = 500
