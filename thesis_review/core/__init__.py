"""
Core domain logic: pipeline routing, agents, calibration and report aggregation.
"""
