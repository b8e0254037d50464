"""
Module 'posts' (feature-first): ingestion multipart, formulaire, validation, checkout.
"""
