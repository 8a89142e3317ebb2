"""
InternMatch
Internship postings and applications for students and companies,
with an admin back-office.

Architecture:
- PostgreSQL: profiles, internships, applications, bookmarks, messages,
  notifications, interviews
- FastAPI: REST API plus a WebSocket channel for realtime notifications
"""

__version__ = "1.0.0"
