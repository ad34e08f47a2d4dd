"""ClubHub package.

Feature modules (users, clubs, events, attendance, points, notifications)
with a thin Flask controller layer over service/repository layers.
"""
