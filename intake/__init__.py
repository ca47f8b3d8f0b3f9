"""
Scholarship application intake: bulk CSV ingestion, eligibility validation,
capacity admission control and suitability scoring.
"""

from intake.runner import process_csv_upload, submit_application

__all__ = ["process_csv_upload", "submit_application"]
