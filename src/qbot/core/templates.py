"""User-facing reply texts."""

from __future__ import annotations

from qbot.storage.models import UserProfile

HELP = """🚢 QBOT Commands:

📋 Available commands:
• Ask questions ending with "?" for technical help
• "koi hai" - Find nearby maritime professionals
• "profile" - View your profile status
• "status" - Check your daily question limits

💡 Tips:
• End technical questions with "?" for detailed answers
• Complete your profile for more daily questions
• Connect with maritime professionals worldwide"""

LOCATION = """🌊 Nearby Maritime Professionals:

I'm working on connecting you with nearby seafarers. This feature will show:
• Officers in nearby ports
• Crew members in your area
• Maritime professionals nearby

Stay tuned for updates! 🚢"""

COMMERCIAL = """🏪 QAAQ Maritime Services:

For commercial inquiries and services, please:
• Visit our website: qaaq.app
• Contact our business team directly
• Check available maritime solutions

I'm specialized in technical assistance. For purchases and commercial services, please use our main platform."""

EMERGENCY = """🚨 EMERGENCY SUPPORT

I understand this may be urgent. For immediate emergency assistance:

🆘 Maritime emergency:
• Contact the Coast Guard / nearest MRCC immediately
• Use VHF Channel 16 (or DSC Channel 70) for distress calls
• Alert nearby vessels and follow your shipboard emergency procedures

📞 Medical emergency:
• Request TMAS (radio medical advice) through your MRCC

What specific emergency are you facing?"""

CASUAL = """That's interesting! 🌊

I'm here primarily for technical maritime questions. If you have any marine engineering questions, feel free to ask them ending with "?"

For general maritime discussions, you might enjoy connecting with other professionals on qaaq.app"""

UNCLEAR = """I didn't quite understand that. 🤔

Could you clarify your maritime question or end it with '?' for technical help?

You can also:
• Type "help" for available commands
• Ask specific marine engineering questions
• Say "koi hai" to find nearby professionals"""

EMPTY_MESSAGE = "I didn't receive your message clearly. Please try sending it again."

LLM_FALLBACK = (
    "I'm having trouble connecting to my AI system. "
    "Please try your question again in a few minutes."
)

STORAGE_FAILURE = (
    "I'm having technical difficulties processing your message. "
    "Please try again in a moment."
)

CRITICAL_ERROR = """⚠️ We're experiencing technical difficulties.
Our team has been notified. Please try again in a few minutes.

For urgent maritime assistance, contact our support team."""

QUOTA_COMPLETE_PROFILE = (
    "You've reached your daily limit of {limit} technical questions. "
    "Your limit will reset at midnight. For urgent queries, contact our experts directly."
)

QUOTA_INCOMPLETE_PROFILE = (
    "You've reached your daily limit of {limit} bot answers. "
    "Please complete your profile on qaaq.app to ask more questions."
)

CLARIFICATION = """I want to give you the most helpful answer about {topic}. Please clarify:

🔍 Are you asking about:
A) Definition/Theory - How it works, purpose, technical explanation
B) Troubleshooting - Solving a problem or operational issue

Reply A for theory/explanation or B for problem-solving guidance.

Your question: '{question}'"""

ONBOARDING_WELCOME = """🚢 Welcome to QAAQ - Maritime Professional Network!
I'm QBOT, your 24/7 maritime technical assistant.

I need a few simple details before I can start answering your maritime questions.
Please share your full name for professional verification:
Example: "John Smith" or "राज कुमार\""""

ONBOARDING_NAME_RETRY = (
    "I need your name first before I can help with technical questions. "
    "Please provide your name & surname (example: Krish Kapoor):"
)

ONBOARDING_NAME_CONFIRM = (
    'Please confirm your name & surname:\n\n"{name}"\n\n'
    'Reply "yes" to confirm or send your correct full name.'
)

ONBOARDING_NAME_CORRECTION = "Please provide your correct name & surname (example: Krish Kapoor):"

ONBOARDING_ASK_RANK = "Thank you {first_name}! What is your maritime rank? (e.g. Chief Engineer, 2nd Officer)"
ONBOARDING_RANK_RETRY = "Please provide your maritime rank (e.g. Chief Engineer, 2nd Officer, Captain)."
ONBOARDING_ASK_SHIP = "Great! What is your present/last ship name?"
ONBOARDING_SHIP_RETRY = "Please provide your present/last ship name."
ONBOARDING_ASK_COMPANY = "Excellent! What is your present/last company name?"
ONBOARDING_COMPANY_RETRY = "Please provide your present/last company name."
ONBOARDING_COMPLETE = (
    "Perfect! Profile complete. Welcome aboard {first_name}! "
    "I'm ready to help with your maritime engineering questions. "
    'End any technical question with "?"'
)


def greeting(profile: UserProfile | None) -> str:
    name = (profile.full_name if profile else "") or "Seafarer"
    return f"""Hello {name}! 👋

I'm QBOT, your maritime technical assistant. How can I help you today?

• Ask any marine engineering question ending with "?"
• Type "help" for available commands
• Say "koi hai" to find nearby maritime professionals"""


def profile_status(profile: UserProfile) -> str:
    lines = [f"👤 Profile completeness: {profile.completeness_percent()}%"]
    missing = profile.missing_fields()
    if missing:
        pretty = ", ".join(name.replace("_", " ") for name in missing)
        lines.append(f"Missing: {pretty}")
        lines.append("Complete your profile on qaaq.app for more daily questions.")
    else:
        lines.append("Your profile is complete. ✅")
    return "\n".join(lines)


def quota_status(used: int, limit: int) -> str:
    remaining = max(limit - used, 0)
    return (
        f"📊 Questions today: {used}/{limit}\n"
        f"Remaining: {remaining}. Your limit resets at midnight."
    )


def clarification(topic: str, question: str) -> str:
    return CLARIFICATION.format(topic=topic, question=question)
