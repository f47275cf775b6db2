"""
MediBook

FastAPI backend for booking doctor appointments: patient and doctor
profiles, weekly availability, video consultations, prescriptions,
health records, messaging and card payments.
"""

__version__ = "1.0.0"
