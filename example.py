"""
Example script demonstrating NoteRAG.

Indexes a handful of notes, runs a few searches and asks the generation
model a question over the retrieved context.
"""

import asyncio
from dotenv import load_dotenv
from noterag import Document, create_note_rag
from noterag.config.settings import get_config, validate_api_keys
from noterag.utils.logging import setup_logging

# Load environment variables
load_dotenv()

setup_logging("noterag", config=get_config())
logger = setup_logging(__name__, config=get_config())

NOTES = [
    Document(id="note-swift", content="Swift is a programming language developed by Apple."),
    Document(id="note-swift-release", content="Swift was first released in 2014."),
    Document(id="note-swift-platforms", content="Swift is used to build apps for iOS, macOS, watchOS and tvOS."),
    Document(id="note-swiftui", content="SwiftUI is a framework for building user interfaces declaratively."),
    Document(id="note-homework", content="My dog ate the homework, so I rewrote it from my notes."),
]


async def main():
    """Main example function."""
    validate_api_keys()
    rag = create_note_rag()

    try:
        logger.info("🚀 Starting NoteRAG example")

        processed = await rag.add_documents(NOTES)
        logger.info(f"📚 Indexed {len(processed)} notes")

        test_questions = [
            "Which language did Apple create?",
            "When was Swift released?",
            "What happened to the homework?"
        ]

        for question in test_questions:
            results = await rag.search(question)
            for result in results:
                logger.info(f"🎯 {result.score:.3f} [{result.document_id}] {result.text[:60]}")

        answer = await rag.generate_response(test_questions[0])
        logger.info(f"📝 Response: {answer[:200]}")

        logger.info(f"📊 System stats: {rag.get_stats()}")
        logger.info("✅ NoteRAG example completed successfully")

    except Exception as e:
        logger.error(f"❌ Example failed: {str(e)}")
        raise
    finally:
        rag.close()


if __name__ == "__main__":
    asyncio.run(main())
