"""Micro-benchmark harness for timed.

Repeats an operation, times each iteration with a wall-clock and a CPU
timer, subtracts the overhead measured on an idle loop, and reports
the aggregates from :mod:`timed.stats`.
"""
