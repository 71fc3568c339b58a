"""Gemini-backed assistant that can turn a chat message into a transaction."""

import logging
from dataclasses import dataclass

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

ADD_TRANSACTION = 'add_transaction'

ADD_TRANSACTION_TOOL = types.Tool(function_declarations=[
    types.FunctionDeclaration(
        name=ADD_TRANSACTION,
        description="Record one income or expense entry for the user.",
        parameters=types.Schema(
            type=types.Type.OBJECT,
            properties={
                'content': types.Schema(type=types.Type.STRING, description="Label, e.g. 'Lunch' or 'Salary'"),
                'amount': types.Schema(type=types.Type.NUMBER, description="Amount in whole currency units"),
                'transaction_type': types.Schema(type=types.Type.STRING, description="'income' or 'expense'"),
                'source': types.Schema(type=types.Type.STRING, description="'cash' or 'bank'"),
                'date': types.Schema(type=types.Type.STRING, description="Date as YYYY-MM-DD"),
            },
            required=['content', 'amount', 'transaction_type'],
        ),
    ),
])


class AssistantError(RuntimeError):
    """Raised when the assistant is unavailable or the model call fails."""


@dataclass
class AssistantReply:
    text: str
    transaction_args: dict = None


def assistant_enabled(config):
    """Quick check returning ``(ok, reason)`` so the UI can say why chat is off."""
    if not config.get('ASSISTANT_ENABLED', True):
        return False, "Assistant is switched off"
    if not (config.get('GEMINI_API_KEY') or '').strip():
        return False, "GEMINI_API_KEY not set"
    return True, "OK"


def build_system_prompt(snapshot):
    return (
        "You are FinAssist, a personal finance assistant.\n"
        f"Current total assets: {snapshot.total:,}.\n"
        f"Cumulative saving against the daily budget: {snapshot.cumulative_saving:,}.\n"
        "Tasks:\n"
        f"1. When the user reports income or spending, call {ADD_TRANSACTION}.\n"
        "2. Give saving advice based on the daily budget.\n"
        "3. Keep replies short and friendly."
    )


def _history_contents(history, message):
    contents = []
    for role, text in history or []:
        contents.append(types.Content(
            role='model' if role == 'assistant' else 'user',
            parts=[types.Part.from_text(text=text)],
        ))
    contents.append(types.Content(role='user', parts=[types.Part.from_text(text=message)]))
    return contents


def ask_assistant(message, snapshot, history, config):
    """Send ``message`` to the model and return an :class:`AssistantReply`.

    ``history`` is a list of ``(role, text)`` pairs, role being ``'user'``
    or ``'assistant'``. Only the first ``add_transaction`` call in the
    response is honoured.
    """
    ok, reason = assistant_enabled(config)
    if not ok:
        raise AssistantError(reason)

    try:
        client = genai.Client(api_key=config['GEMINI_API_KEY'])
        response = client.models.generate_content(
            model=config.get('GEMINI_MODEL', 'gemini-2.5-flash'),
            contents=_history_contents(history, message),
            config=types.GenerateContentConfig(
                system_instruction=build_system_prompt(snapshot),
                tools=[ADD_TRANSACTION_TOOL],
                temperature=0.7,
            ),
        )
    except Exception as e:
        logger.exception("Gemini request failed")
        raise AssistantError(str(e)) from e

    return reply_from_response(response)


def reply_from_response(response):
    transaction_args = None
    for call in response.function_calls or []:
        if call.name == ADD_TRANSACTION:
            transaction_args = dict(call.args or {})
            break

    text = ''
    candidates = response.candidates or []
    if candidates and candidates[0].content and candidates[0].content.parts:
        text = ''.join(part.text for part in candidates[0].content.parts if part.text)
    return AssistantReply(text=text.strip(), transaction_args=transaction_args)
