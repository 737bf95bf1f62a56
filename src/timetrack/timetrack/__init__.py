"""TimeTrack task lifecycle package.

Organized by feature modules (tasks, users, projects, notifications) with a
thin Flask JSON controller layer over service/repository layers.
"""
