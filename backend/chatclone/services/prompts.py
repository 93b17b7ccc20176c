"""
System prompts and prompt templates.
"""

CHAT_SYSTEM_PROMPT = (
    "You are ChatGPT, a helpful AI assistant created by OpenAI. "
    "Respond naturally and helpfully to user queries.\n"
    "Here is relevant memory/context for this user: {memory}"
)

TITLE_SYSTEM_PROMPT = (
    "Generate a concise, descriptive title (max 5 words) for a chat based on the first message. "
    "The title should capture the main topic or intent of the conversation. "
    "Do not include any quotes or special characters in the title. "
    "Return only the plain text title."
)

CODE_REVIEW_SYSTEM_PROMPT = (
    "You are a code review assistant. "
    "Provide clear, concise explanations and suggestions in markdown format."
)

CODE_REVIEW_PROMPT = """Analyze this {language} code and provide:
1. The exact output that will be displayed on the terminal if it is run, or the type of error with its reason.
2. A brief explanation of what the code does
3. Any potential improvements or corrections
4. Best practices that could be applied

Code:
```{language}
{code}
```

Format your response in markdown with clear sections."""

IMAGE_DESCRIPTION_PROMPT = (
    "Describe this image in detail. Include any visible text, people, objects, "
    "and the overall context so it can be discussed in a conversation."
)

MEMORY_EXTRACTION_PROMPT = (
    "Extract durable facts about the user from this exchange: preferences, "
    "personal details, goals and ongoing projects. Write one short fact per line "
    "in the third person (e.g. \"User prefers Python\"). "
    "If there is nothing worth remembering, reply with NONE."
)
