"""
Custom validators for the core models.
"""

from django.core.exceptions import ValidationError


def validate_avatar_image(image):
    """
    Validate avatar image file.

    Checks:
    - File size (max 5MB)
    - File format (jpg, jpeg, png, webp)

    Args:
        image: UploadedFile object

    Raises:
        ValidationError: If image is invalid
    """
    if not image:
        return

    max_size = 5 * 1024 * 1024
    if image.size > max_size:
        raise ValidationError(
            f'Image file size cannot exceed 5MB. Current size: {image.size / (1024 * 1024):.2f}MB',
            code='image_too_large'
        )

    valid_extensions = ['jpg', 'jpeg', 'png', 'webp']
    file_name = image.name.lower()

    if not any(file_name.endswith(f'.{ext}') for ext in valid_extensions):
        raise ValidationError(
            f'Invalid image format. Allowed formats: {", ".join(valid_extensions)}',
            code='invalid_image_format'
        )

    valid_content_types = [
        'image/jpeg',
        'image/png',
        'image/webp'
    ]

    if hasattr(image, 'content_type') and image.content_type:
        if image.content_type not in valid_content_types:
            raise ValidationError(
                f'Invalid image content type: {image.content_type}',
                code='invalid_content_type'
            )


def validate_time_range(start_time, end_time):
    """
    Validate that a time range is non-empty.

    Args:
        start_time: datetime.time or None
        end_time: datetime.time or None

    Raises:
        ValidationError: If end_time is not after start_time
    """
    if start_time is None or end_time is None:
        return

    if end_time <= start_time:
        raise ValidationError(
            {'end_time': 'End time must be after start time.'},
            code='invalid_time_range'
        )


def validate_day_of_week(value):
    """
    Validate a weekday number (0=Sunday .. 6=Saturday).

    Raises:
        ValidationError: If value is outside 0..6
    """
    if value is None or not 0 <= value <= 6:
        raise ValidationError(
            'day_of_week must be between 0 (Sunday) and 6 (Saturday).',
            code='invalid_day_of_week'
        )
