"""Domain packages: reminders and appointments"""
