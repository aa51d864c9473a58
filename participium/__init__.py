"""
Participium - Report Lifecycle & Collaboration Engine.

Governs a citizen report from approval to resolution: status transitions,
office/officer routing and the municipality <-> external maintainer
comment channel.
"""

__version__ = "0.1.0"
