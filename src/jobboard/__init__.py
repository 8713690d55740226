"""Job board backend.

Admin management of job postings, organizations and job boards, a public
v1 API for reading them, and ingestion from the Fantastic Jobs aggregation
API.
"""

__version__ = "0.1.0"
