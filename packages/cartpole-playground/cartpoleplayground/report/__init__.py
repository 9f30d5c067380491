"""Reporting for Cart-Pole Playground sessions."""
