"""Faceoff - pickup hockey signups and team splits."""
