# briefing.py

import json
import re

import anthropic

from config import Config
from exceptions import LLMError
from logger import logger
from utils import json_dumps, to_jsonable

JSON_BLOCK_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")

REPORT_SECTIONS = """\
- projectOverview (name, description, businessImpact, owner, status, completion, startDate, completionDate, totalDuration)
- executiveSummary (several paragraphs drawing on ticket comments{chat_suffix})
- keyAccomplishments (array: accomplishment, ticketIds, impact, team)
- keyDecisions (array: decision, context, madeBy, ticketId, date, source)
- discussionHighlights (array: topic, summary, participants, ticketId, source)
- workBreakdown (array: category, description, status, tickets with id/title/state/assignee)
- teamContributions (array: person, ticketsCompleted, keyContributions, commentCount{chat_count})
- dependencies (array: dependency, type, status, owner, impact, relatedTicketId)
- blockers (array: blocker, ticket, severity, status, resolution, mentionedInComments)
- risks (array: risk, likelihood, impact, mitigation, owner, sourceTicketId)
- relatedWork (array: ticketId, title, relationTypes, status, relevance)
- openQuestions (array: question, ticketId, askedBy, source)
- metrics (total, completed, inProgress, notStarted, blocked, completionRate, totalComments{chat_metrics})
- recommendations (array: priority, recommendation, rationale, owner, category)
- nextSteps (array: action, owner, priority)"""

CHAT_SECTIONS = """\
- chatDiscussions (array: topic, summary, participants, relatedTickets with ticketId/matchType/confidence/reasoning, mvpCategory, needsTicket)
- inferredMappings (array: chatTopic, suggestedTickets with ticketId/title/confidence/reasoning/matchedParticipants/sharedKeywords)
- teamCrossAnalysis (array: person, activeInChat, chatMessageCount, activeInTickets, ticketsInvolved, commentCount, engagementPattern)
- mvpAnalysis (object: mvpItems, postMvpItems, unmappedDiscussions)"""

CHAT_INSTRUCTIONS = """
The data also contains chat messages. correlations.chat_to_tickets lists the
messages that mention ticket ids explicitly. Messages in
correlations.unlinked_chats mention no ticket: map them to tickets by topic,
shared participants (chat senders vs. assignees, reporters and commenters)
and timing, and give a high/medium/low confidence with reasoning for each
mapping.
"""


def build_analysis_prompt(data_json, has_chat):
    sections = REPORT_SECTIONS.format(
        chat_suffix=" and chats" if has_chat else "",
        chat_count=", chatMessageCount" if has_chat else "",
        chat_metrics=", totalChatMessages, chatToTicketMappingRate" if has_chat else "",
    )
    if has_chat:
        sections = f"{sections}\n{CHAT_SECTIONS}"

    return (
        "You are a senior technical program manager writing an executive briefing "
        "from issue tracker data. Comments carry decisions, blockers and context; "
        "linked issues and dependencies show connected work.\n"
        f"{CHAT_INSTRUCTIONS if has_chat else ''}\n"
        f"Return a single JSON object with:\n{sections}\n\n"
        "Refer to tickets by their ids.\n\n"
        f"DATA: {data_json}"
    )


def build_ask_prompt(context_json, question):
    return (
        "You are a project management assistant with the full project data, "
        "including comments, linked issues, dependencies and any chat messages. "
        "Answer with ticket ids and specifics, citing comments or chat "
        "discussions where relevant.\n\n"
        f"DATA: {context_json}\n\n"
        f"QUESTION: {question}"
    )


def _salvage_json(text):
    """Trim back to earlier closing braces until a prefix parses."""
    start = text.find("{")
    if start == -1:
        return None
    end = text.rfind("}")
    while end > start:
        try:
            parsed = json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            end = text.rfind("}", start, end)
            continue
        if isinstance(parsed, dict):
            return parsed
        return None
    return None


def extract_json(text):
    """
    Best-effort extraction of a JSON object from a model reply.

    Tries a ```json fenced block, then the span between the first "{" and the
    last "}", then progressively shorter prefixes. If nothing parses the raw
    text is returned under "raw" next to an "error" marker.

    :param text: Free-text model reply
    :return: dict
    """
    text = text or ""
    block = JSON_BLOCK_PATTERN.search(text)
    if block:
        candidate = block.group(1)
    else:
        start = text.find("{")
        end = text.rfind("}")
        candidate = text[start : end + 1] if start != -1 and end > start else text

    parse_error = None
    try:
        parsed = json.loads(candidate.strip())
        if isinstance(parsed, dict):
            return parsed
        parse_error = f"Expected a JSON object, got {type(parsed).__name__}"
    except json.JSONDecodeError as e:
        parse_error = str(e)

    salvaged = _salvage_json(text)
    if salvaged is not None:
        logger.info("Recovered partial JSON from model reply")
        return salvaged

    logger.warning(f"Could not parse model reply as JSON ({len(text)} chars): {parse_error}")
    return {"error": "Failed to parse AI response", "parse_error": parse_error, "raw": text}


class BriefingService:
    def __init__(self, client=None, model=None):
        self._client = client
        self.model = model or Config.ANTHROPIC_MODEL

    @property
    def client(self):
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=Config.ANTHROPIC_API_KEY)
        return self._client

    async def _complete(self, prompt, max_tokens):
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            logger.error(f"Model request failed: {e}")
            raise LLMError(f"Model request failed: {e}")

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

    async def analyze(self, data):
        """
        Ask the model for a structured briefing of an assembled project graph.

        :param data: ProjectGraph or its dict form
        :return: Parsed report dict, or a fallback dict holding the raw reply
        """
        payload = to_jsonable(data)
        data_json = json.dumps(payload)
        chat = payload.get("chat_messages") or {}
        has_chat = bool(chat.get("messages"))
        if has_chat:
            logger.info(
                f"Including {len(chat['messages'])} chat messages from "
                f"{len(chat.get('participants') or [])} participants"
            )

        logger.info(f"Analyzing with {self.model}")
        text = await self._complete(
            build_analysis_prompt(data_json, has_chat), Config.ANALYSIS_MAX_TOKENS
        )
        logger.info(f"Model reply length: {len(text)}")
        return extract_json(text)

    async def ask(self, question, context):
        """Answer a free-text question about previously assembled project data."""
        text = await self._complete(
            build_ask_prompt(json_dumps(context), question), Config.ASK_MAX_TOKENS
        )
        return text
