"""Keepsake — a small record-keeping service for a relationship tracker."""
