"""Celery workers for running sources in parallel"""
