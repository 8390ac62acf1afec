"""Reporting helpers."""

from .holdings import build_closed_positions_report, build_holdings_report, build_summary

__all__ = ["build_closed_positions_report", "build_holdings_report", "build_summary"]
