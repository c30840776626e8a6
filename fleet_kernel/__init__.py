"""
Fleet Kernel - attribute assignment and charge calculation core.

The cost-bearing part of the fleet billing back office:
- Attribute type registry
- Temporal, overlap-free attribute assignments per cab or shift
- Historical cost schedules per attribute type
- Charge calculation over a billing period
- Application scope resolution shared by expense and revenue categories
"""

__version__ = "0.1.0"
