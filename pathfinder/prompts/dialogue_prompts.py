"""
Dialogue Prompts

Replies the dialogue controller and chat service send back to the user.
Each reply asks at most one question.
"""

from pathfinder.prompts.templates import PromptTemplate


NEUTRAL_REPROMPT = "I didn't catch that. What would you like to learn?"

WELCOME = (
    "Hi! I'm LinkMe. Tell me what you'd like to learn and I'll put together "
    "the best tutorials for it."
)

RESTART = "Sure, let's start fresh! What would you like to learn?"

ASK_TOPIC = "Good to know! What would you like to learn?"

ASK_LEVEL = PromptTemplate(
    "Nice, {topic}! Are you just starting out, or do you already have some experience with it?",
    name="ask_level",
)

ASK_LEVEL_AGAIN = PromptTemplate(
    "No problem. Would you call yourself a beginner, intermediate, or advanced with {topic}?",
    name="ask_level_again",
)

ASK_GOAL = PromptTemplate(
    "Got it, {level} level. What's your goal: build a project, understand the concepts, "
    "or get a quick overview?",
    name="ask_goal",
)

ASK_GOAL_AGAIN = PromptTemplate(
    "Just so I pick the right videos: a hands-on project, deeper concepts, or a quick crash course?",
    name="ask_goal_again",
)

NEW_TOPIC = PromptTemplate(
    "Switching to {topic}! Are you just starting out, or do you already have some experience with it?",
    name="new_topic",
)

SEARCHING = PromptTemplate(
    "Perfect! Let me find some great {level} {topic} tutorials for you.",
    name="searching",
)

REFINING = PromptTemplate(
    "Let me look for more {topic} tutorials.",
    name="refining",
)

SEARCH_FAILED = (
    "Sorry, I couldn't search for tutorials right now. Please try again in a moment."
)

NO_RESULTS = PromptTemplate(
    "I couldn't find tutorials for \"{topic}\". Try:\n"
    "- a more common name for the subject (e.g. \"javascript\" instead of \"js stuff\")\n"
    "- a broader topic\n"
    "- checking the spelling",
    name="no_results",
)

RAW_RESULTS = PromptTemplate(
    "Here are some {topic} tutorials I found for you:",
    name="raw_results",
)

PATH_READY = PromptTemplate(
    "I've put together a learning path for {topic}:",
    name="path_ready",
)
