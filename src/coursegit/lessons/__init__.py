"""Lesson ids, lesson commits and lesson folders."""
