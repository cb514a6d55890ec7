"""
CareShare - Volunteer coordination service for homebound seniors

This package provides the REST API used by the CareShare portals and the
ElevenLabs voice agent: seniors, volunteers, skills, appointments and the
inbound conversation workflow.
"""

__version__ = "1.0.0"
