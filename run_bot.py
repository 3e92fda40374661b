"""
Run Slack Assistant - Direct launch script
"""
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv
load_dotenv()

from slack_assistant.server import main

print("=" * 60)
print("  🤖 Slack Knowledge Assistant - Starting...")
print("=" * 60)

print("""
Slack:
  DM the bot, or mention it in a channel, to ask a question.
  Share a PDF, text or CSV file to add it to your context.

Dashboard API:
  POST /api/chat            {"userId": ..., "message": ...}
  GET  /api/conversations   ?userId=...
  POST /api/upload          multipart: file, userId

Press Ctrl+C to stop.
""")

main()
