"""HRMS backend package.

Organized by feature modules (users, attendance) with a thin Flask controller
layer over service/repository layers.
"""
