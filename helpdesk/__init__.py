"""
Complaint and helpdesk management service.

Employees submit complaints, administrators triage and resolve them through
tickets and meetings, and a realtime change feed keeps dashboards current.
"""

__version__ = "1.0.0"
