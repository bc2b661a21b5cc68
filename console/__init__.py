"""Operations console for the HKare hospital backend.

This package holds the backend client, the screen registry, serializers
for the modal forms, and the views and routes of the console.
"""
