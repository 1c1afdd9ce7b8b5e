#!/usr/bin/env python3
"""
LaserZone Hub - Create Manager Account
Run this script to create the first manager for a production venue.

Usage:
    python scripts/create_manager.py

Or with environment variables:
    MANAGER_EMAIL=sef@laserzone.ro MANAGER_NAME="Ana Pop" MANAGER_PASSWORD=parola123 python scripts/create_manager.py
"""
import os
import sys
import secrets
import string
import getpass

# Add parent directory to path so we can import the app
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from laserzone_hub import create_app
from laserzone_hub.models.db_models import DBUser, UserRole
from laserzone_hub.services.db_service import create_user

MIN_PASSWORD_LENGTH = 8


def generate_password(length=12):
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def create_manager():
    app = create_app()

    with app.app_context():
        existing = DBUser.query.filter_by(role=UserRole.MANAGER).first()
        if existing:
            print(f"\nA manager account already exists: {existing.email}")
            if input("Create another manager? (y/N): ").strip().lower() != 'y':
                print("Aborted.")
                return 1

        email = os.environ.get('MANAGER_EMAIL') or input("Manager email: ").strip()
        if not email or '@' not in email:
            print("Error: Valid email required")
            return 1
        email = email.lower()

        if DBUser.query.filter_by(email=email).first():
            print(f"Error: User with email {email} already exists")
            return 1

        name = os.environ.get('MANAGER_NAME') or input("Full name: ").strip() or 'Manager'

        password = os.environ.get('MANAGER_PASSWORD')
        if not password:
            if input("Generate password? (Y/n): ").strip().lower() != 'n':
                password = generate_password()
                print(f"\nGenerated password: {password}")
                print("   (Save this somewhere safe!)\n")
            else:
                password = getpass.getpass("Enter password: ")
                if password != getpass.getpass("Confirm password: "):
                    print("Error: Passwords don't match")
                    return 1

        if len(password) < MIN_PASSWORD_LENGTH:
            print(f"Error: Password must be at least {MIN_PASSWORD_LENGTH} characters")
            return 1

        user = create_user(email, name, password, role=UserRole.MANAGER)

        print(f"\nManager created: {user.email} ({user.id})")
        print("Log in at POST /api/auth/login\n")
        return 0


if __name__ == '__main__':
    sys.exit(create_manager())
