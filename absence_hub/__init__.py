"""Absence Hub — absence balances, vacation accrual and request validation."""
