"""Vacations — seniority entitlement, single-year balance and FIFO bucket ledger."""
