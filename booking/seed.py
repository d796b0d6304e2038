"""Sample provider used for local development and demos."""

import logging

from booking.repository import BookingRepository

logger = logging.getLogger(__name__)

SAMPLE_USERNAME = 'sarahjohnson'

SAMPLE_SERVICES = [
    {
        'name': 'Career Coaching Session',
        'description': 'One-on-one career development coaching',
        'duration_minutes': 60,
        'price_cents': 12000,
    },
    {
        'name': 'Business Strategy Consultation',
        'description': 'In-depth business planning and strategy',
        'duration_minutes': 90,
        'price_cents': 17500,
    },
    {
        'name': 'Resume Review & Optimization',
        'description': 'Professional resume feedback and improvements',
        'duration_minutes': 45,
        'price_cents': 8500,
    },
]

# day_of_week, is_active, start_time, end_time
SAMPLE_WEEK = [
    (0, False, '10:00', '14:00'),
    (1, True, '09:00', '17:00'),
    (2, True, '09:00', '17:00'),
    (3, True, '09:00', '17:00'),
    (4, True, '09:00', '17:00'),
    (5, True, '09:00', '17:00'),
    (6, False, '10:00', '14:00'),
]


def seed_sample_data(repository: BookingRepository) -> int:
    """Create the sample provider unless it already exists; return its id."""
    existing = repository.get_user_by_username(SAMPLE_USERNAME)
    if existing is not None:
        return existing.id

    user = repository.create_user(
        username=SAMPLE_USERNAME,
        name='Sarah Johnson',
        email='sarahjohnson@example.com',
        profile_image='https://images.unsplash.com/photo-1550525811-e5869dd03032',
    )

    for service in SAMPLE_SERVICES:
        repository.create_service(user_id=user.id, **service)

    for day, is_active, start_time, end_time in SAMPLE_WEEK:
        repository.create_availability(
            user_id=user.id,
            day_of_week=day,
            is_active=is_active,
            start_time=start_time,
            end_time=end_time,
        )

    repository.create_settings(
        user_id=user.id,
        buffer_before_minutes=10,
        buffer_after_minutes=10,
        min_notice_minutes=240,
        max_advance_days=30,
    )

    logger.info('Seeded sample provider %s with id %s', SAMPLE_USERNAME, user.id)
    return user.id
