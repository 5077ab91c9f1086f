#!/usr/bin/env python3
"""
Create environment template for the offline gateway.
Helps users set up the required environment variables.
"""

import sys
from pathlib import Path

REQUIRED_VARS = ['ORIGIN_URL']
OPTIONAL_VARS = ['SECRET_KEY', 'CACHE_VERSION', 'DATABASE_PATH']

ENV_TEMPLATE = """# ========================================
# Haven Word Offline Gateway Environment Variables
# ========================================

# REQUIRED: Church site the gateway sits in front of
ORIGIN_URL=https://your_church_site_here

# OPTIONAL: Name shown on notifications and the offline page
APP_NAME=Haven Word Church

# ========================================
# Flask Configuration
# ========================================

# Environment (development/production)
FLASK_ENV=production

# Secret key for Flask sessions
# Generate a secure key: python -c "import secrets; print(secrets.token_hex(32))"
SECRET_KEY=dev-secret-key-change-in-production

# Port for the application
PORT=8090

# ========================================
# Cache Configuration
# ========================================

# Bump to roll every cache partition on the next activation
CACHE_VERSION=v1.0.0

# sqlite (persistent) or memory
CACHE_BACKEND=sqlite

# Database file path (relative to app directory)
DATABASE_PATH=data/offline_gateway.db

# Seconds before an origin request is abandoned
NETWORK_TIMEOUT=30

# Seconds without a check-in before an open page is forgotten
CLIENT_TIMEOUT=1800

# ========================================
# Background Tasks (seconds)
# ========================================

CONNECTIVITY_CHECK_INTERVAL=30
CONTENT_REFRESH_INTERVAL=3600
INSTALL_RETRY_INTERVAL=300
"""


def create_env_template(env_file: Path = Path('.env'), force: bool = False) -> bool:
    """Create a .env file template with all supported variables."""
    if env_file.exists() and not force:
        print("📝 .env file already exists")
        response = input("Do you want to overwrite it? (y/N): ")
        if response.lower() != 'y':
            print("Skipping .env file creation")
            return False

    try:
        env_file.write_text(ENV_TEMPLATE)
        print("✅ Created .env file template")
        print("\n📋 Next steps:")
        print("1. Edit the .env file with your actual values")
        print("2. At minimum, set ORIGIN_URL")
        print("3. Run: python wsgi.py")
        return True

    except OSError as e:
        print(f"❌ Failed to create .env file: {e}")
        return False


def validate_env_file(env_file: Path = Path('.env')) -> bool:
    """Validate the current .env file."""
    if not env_file.exists():
        print("❌ .env file not found")
        return False

    content = env_file.read_text()

    print("🔍 Validating .env file...")

    missing_required = [
        var for var in REQUIRED_VARS
        if f'{var}=' not in content or 'your_' in content.split(f'{var}=', 1)[1].splitlines()[0]
    ]
    if missing_required:
        print(f"❌ Missing required variables: {', '.join(missing_required)}")
        return False

    missing_optional = [var for var in OPTIONAL_VARS if f'{var}=' not in content]
    if missing_optional:
        print(f"⚠️  Missing optional variables: {', '.join(missing_optional)}")
        print("   Defaults from config.py will be used")

    print("✅ .env file validation passed")
    return True


def main():
    """Main function."""
    print("🔧 Environment Setup Helper")
    print("=" * 40)

    if len(sys.argv) > 1 and sys.argv[1] == 'validate':
        return 0 if validate_env_file() else 1

    create_env_template()
    print("\n" + "=" * 40)
    return 0 if validate_env_file() else 1


if __name__ == '__main__':
    sys.exit(main())
