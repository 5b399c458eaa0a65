"""Relay application for the MediBill case dashboard.

This package contains the upstream API client, the envelope and case
normalization services, and the views that proxy the dashboard's
requests to the upstream MediBill API.
"""
