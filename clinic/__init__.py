"""Clinic application for the Medicore backend.

This package contains models, serializers, views, services and route
registrations for patients, doctors, appointments, medical records,
billing and inventory.
"""
