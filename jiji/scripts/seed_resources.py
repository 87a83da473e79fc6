"""
Seed Resources Script
Populates the resources table with the sample learning materials.
Run with: python -m jiji.scripts.seed_resources [--clear]
"""

import argparse
import logging
import sys
from typing import Dict, List

from supabase import Client, create_client

from jiji.config.settings import Settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Matches no real row; lets delete() run against every row
NIL_UUID = "00000000-0000-0000-0000-000000000000"

SAMPLE_RESOURCES = [
    {
        "title": "Introduction to RAG",
        "description": "Learn the basics of Retrieval-Augmented Generation and how it enhances LLM responses with external knowledge.",
        "type": "ppt",
        "storage_path": "presentations/rag-intro.pptx",
        "tags": ["rag", "ai", "llm", "retrieval", "generation"],
    },
    {
        "title": "RAG Tutorial Video",
        "description": "Step-by-step RAG implementation guide with practical examples and code walkthroughs.",
        "type": "video",
        "storage_path": "videos/rag-tutorial.mp4",
        "tags": ["rag", "tutorial", "video", "hands-on"],
    },
    {
        "title": "Machine Learning Fundamentals",
        "description": "Complete ML course covering supervised learning, unsupervised learning, and model evaluation techniques.",
        "type": "ppt",
        "storage_path": "presentations/ml-fundamentals.pptx",
        "tags": ["machine learning", "ml", "basics", "supervised", "unsupervised"],
    },
    {
        "title": "Neural Networks Explained",
        "description": "Deep dive into neural networks architecture, backpropagation, and training techniques.",
        "type": "video",
        "storage_path": "videos/neural-networks.mp4",
        "tags": ["neural network", "deep learning", "ai", "architecture"],
    },
    {
        "title": "Transformer Architecture",
        "description": "Understanding the transformer model that powers modern LLMs like GPT and BERT.",
        "type": "ppt",
        "storage_path": "presentations/transformers.pptx",
        "tags": ["transformer", "attention", "llm", "architecture", "nlp"],
    },
    {
        "title": "Building LLM Applications",
        "description": "Practical guide to building applications with large language models including prompt engineering.",
        "type": "video",
        "storage_path": "videos/llm-apps.mp4",
        "tags": ["llm", "applications", "development", "practical"],
    },
    {
        "title": "Vector Databases Overview",
        "description": "Introduction to vector databases and their role in semantic search and RAG systems.",
        "type": "ppt",
        "storage_path": "presentations/vector-db.pptx",
        "tags": ["vector database", "embeddings", "semantic search", "rag"],
    },
    {
        "title": "Prompt Engineering Masterclass",
        "description": "Advanced techniques for crafting effective prompts for various AI applications.",
        "type": "video",
        "storage_path": "videos/prompt-engineering.mp4",
        "tags": ["prompt engineering", "llm", "ai", "techniques"],
    },
]


def build_resources(supabase_url: str, bucket: str) -> List[Dict]:
    """Sample resources with file_url pointing at the public bucket"""
    base = f"{supabase_url.rstrip('/')}/storage/v1/object/public/{bucket}"
    return [{**resource, "file_url": f"{base}/{resource['storage_path']}"} for resource in SAMPLE_RESOURCES]


def clear_resources(supabase: Client) -> None:
    logger.info("Clearing existing resources...")
    supabase.table("resources").delete().neq("id", NIL_UUID).execute()
    logger.info("Resources cleared")


def seed_resources(supabase: Client, resources: List[Dict]) -> int:
    """Insert or update resources by title. Returns the number processed."""
    logger.info("Seeding resources...")
    created_count = 0
    updated_count = 0

    for resource in resources:
        try:
            existing = supabase.table("resources")\
                .select("id")\
                .eq("title", resource["title"])\
                .execute()

            if existing.data:
                supabase.table("resources")\
                    .update(resource)\
                    .eq("id", existing.data[0]["id"])\
                    .execute()
                updated_count += 1
                logger.debug(f"Updated resource: {resource['title']}")
            else:
                supabase.table("resources").insert(resource).execute()
                created_count += 1
                logger.debug(f"Created resource: {resource['title']}")
        except Exception as e:
            logger.error(f"Failed to seed \"{resource['title']}\": {e}")

    logger.info(f"Resources seeded: {created_count} created, {updated_count} updated")
    return created_count + updated_count


def table_counts(supabase: Client) -> Dict[str, int]:
    counts = {}
    for table in ("resources", "queries", "profiles"):
        try:
            result = supabase.table(table).select("id", count="exact", head=True).execute()
            counts[table] = result.count or 0
        except Exception as e:
            logger.error(f"Could not count {table}: {e}")
    return counts


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed the resources table with sample learning materials")
    parser.add_argument("-c", "--clear", action="store_true", help="clear existing resources before seeding")
    args = parser.parse_args(argv)

    settings = Settings()
    key = settings.supabase_service_role_key or settings.supabase_anon_key
    if not (settings.supabase_url and key):
        logger.error("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
        sys.exit(1)

    logger.info(f"Using {'service role' if settings.supabase_service_role_key else 'anon'} key for {settings.supabase_url}")
    try:
        supabase = create_client(settings.supabase_url, key)
        if args.clear:
            clear_resources(supabase)
        count = seed_resources(supabase, build_resources(settings.supabase_url, settings.storage_bucket))
        for table, total in table_counts(supabase).items():
            logger.info(f"{table}: {total} row(s)")
        logger.info(f"Seeding completed successfully! {count} resources processed")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
