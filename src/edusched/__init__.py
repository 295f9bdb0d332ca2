"""EduSched Central package.

School administration backend: user registration and approval, role-based
access (supervision vs. instructor), per-tenant branding and JSON backups.
Authentication and file storage are delegated to a hosted backend service;
application tables live in MySQL.

Organized by feature modules (users, catalog, branding, backup) with a thin
Flask controller layer on top of service/repository layers.
"""
