#!/usr/bin/env python3
"""
Storage Setup Script

Prepares the backing stores before the first run:
1. Creates the relational tables (messages, queries, uploaded_files)
2. Checks the Pinecone index exists, creating it if asked to

Usage:
    python scripts/setup_storage.py
    python scripts/setup_storage.py --create-index
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
load_dotenv()

import logging

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from config.settings import get_settings
from slack_assistant.database import Database


def print_banner():
    print("\n" + "=" * 60)
    print("  Slack Knowledge Assistant - Storage Setup")
    print("=" * 60 + "\n")


def setup_database(url: str) -> bool:
    """Create the relational schema."""
    print(f"Database: {url}")

    try:
        Database(url=url).init_schema()
    except Exception as e:
        print(f"❌ Schema creation failed: {e}")
        return False

    print("✅ Tables ready: messages, queries, uploaded_files")
    return True


def setup_pinecone(api_key: str, index_name: str, dimension: int, create: bool) -> bool:
    """Check the Pinecone index, optionally creating a serverless one."""
    from pinecone import Pinecone, ServerlessSpec

    if not api_key:
        print("❌ PINECONE_API_KEY is not set")
        return False

    print(f"\nPinecone index: {index_name} (dimension {dimension})")

    pc = Pinecone(api_key=api_key)
    try:
        existing = pc.list_indexes().names()
    except Exception as e:
        print(f"❌ Could not list Pinecone indexes: {e}")
        return False

    if index_name in existing:
        stats = pc.Index(index_name).describe_index_stats()
        print(f"✅ Index exists with {stats.total_vector_count} vectors")
        return True

    if not create:
        print("❌ Index not found. Re-run with --create-index to create it.")
        return False

    pc.create_index(
        name=index_name,
        dimension=dimension,
        metric="cosine",
        spec=ServerlessSpec(cloud="aws", region="us-east-1"),
    )
    print(f"✅ Created index {index_name}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Prepare storage for the Slack assistant")
    parser.add_argument("--create-index", action="store_true", help="Create the Pinecone index if missing")
    args = parser.parse_args()

    print_banner()
    settings = get_settings()

    ok = setup_database(settings.database.url)

    if settings.vector_store.provider == "pinecone":
        ok = setup_pinecone(
            settings.vector_store.pinecone_api_key,
            settings.vector_store.pinecone_index,
            settings.embedding.dimension,
            args.create_index,
        ) and ok
    else:
        print(f"\nVector store provider is {settings.vector_store.provider}; nothing to set up")

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
