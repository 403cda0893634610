"""Database initialization utilities for Kindred"""
import os
from datetime import date

DEMO_PASSWORD = 'DemoPass123!'

DEMO_USERS = [
    {
        'first_name': 'Alice',
        'last_name': 'Walker',
        'email': 'alice@kindred.test',
        'mobile_number': '+1-555-010-1001',
        'birthdate': date(1994, 3, 12),
        'gender': 'female',
        'sexual_orientation': 'straight',
        'gender_interest': 'male',
        'bio': 'Coffee, climbing, and bad puns.',
        'city': 'Portland',
        'state': 'OR',
        'country': 'USA',
    },
    {
        'first_name': 'Bob',
        'last_name': 'Rivera',
        'email': 'bob@kindred.test',
        'mobile_number': '+1-555-010-1002',
        'birthdate': date(1992, 8, 30),
        'gender': 'male',
        'sexual_orientation': 'straight',
        'gender_interest': 'female',
        'bio': 'Weekend baker. Will share bread.',
        'city': 'Portland',
        'state': 'OR',
        'country': 'USA',
    },
    {
        'first_name': 'Sam',
        'last_name': 'Okafor',
        'email': 'sam@kindred.test',
        'mobile_number': '+1-555-010-1003',
        'birthdate': date(1997, 1, 5),
        'gender': 'nonbinary',
        'sexual_orientation': 'queer',
        'gender_interest': 'both',
        'bio': 'Looking for someone to argue about films with.',
        'city': 'Seattle',
        'state': 'WA',
        'country': 'USA',
    },
]


def create_admin_user(db, bcrypt):
    """Create admin user if not exists"""
    # Import here to avoid circular imports
    from models.user import User

    admin_email = os.environ.get('ADMIN_EMAIL', 'admin@kindred.app').lower().strip()
    admin = User.query.filter_by(email=admin_email).first()

    if not admin:
        print("Creating admin user...")
        admin = User(
            first_name='Kindred',
            last_name='Admin',
            email=admin_email,
            mobile_number='0000000000',
            password_hash=bcrypt.generate_password_hash(
                os.environ.get('ADMIN_PASSWORD', 'Admin123!')
            ).decode('utf-8'),
            birthdate=date(1990, 1, 1),
            gender='other',
            sexual_orientation='other',
            gender_interest='both',
            bio='',
            role='admin'
        )
        db.session.add(admin)
        db.session.commit()
        print(f"Admin user created: {admin_email}")
    else:
        print(f"Admin user already exists: {admin_email}")
    return admin


def create_demo_users(db, bcrypt):
    """Seed a few swipeable profiles for local development"""
    from models.user import User

    password_hash = bcrypt.generate_password_hash(DEMO_PASSWORD).decode('utf-8')
    created_count = 0
    for user_data in DEMO_USERS:
        if User.query.filter_by(email=user_data['email']).first():
            continue
        db.session.add(User(password_hash=password_hash, **user_data))
        created_count += 1

    db.session.commit()
    print(f"Created {created_count} demo users (password: {DEMO_PASSWORD})")
    return created_count
