"""
academy_payroll.observability

Observability package.

Responsibilities:
- Structured logging configuration (with secret scrubbing).
- Request context propagation for consistent log enrichment.
"""

# Package marker.
