import asyncio
import os
import sys
from pathlib import Path

# Add project root to path so we can import voiceline
sys.path.append(os.getcwd())

from voiceline.config.dependencies import ConfigurationError, build_analysis_client
from voiceline.pipelines.voice import SubmissionValidationError, resolve_content_type
from voiceline.services import AnalysisError


async def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/analyze_call.py path/to/call.(wav|mp3|webm)")
        return

    file_path = Path(sys.argv[1])
    if not file_path.exists():
        print(f"File '{file_path}' not found.")
        return

    try:
        _, content_type = resolve_content_type(file_path.name)
        client = build_analysis_client()
    except (SubmissionValidationError, ConfigurationError) as e:
        print(f"Cannot analyze: {e}")
        return

    print(f"Analyzing {file_path} ({content_type}) with Gemini; nothing is written to the sheet...")
    try:
        record = await client.analyze(file_path, content_type)
    except AnalysisError as e:
        print(f"\nAnalysis Error [{e.stage}]: {e}")
        return

    print("\n--- Analysis ---")
    print(record.model_dump_json(indent=2))
    print("----------------")


if __name__ == "__main__":
    asyncio.run(main())
