"""
Context templates, one per command kind.

Templates are mustache strings rendered by ``context.compose``. Variables are
taken from the conversation state: ``agent_name``, ``bio``,
``recent_messages`` and anything in ``state.values``. Triple braces keep the
conversation text unescaped.
"""
from __future__ import annotations

from typing import Mapping

from .models import CommandKind


_HEADER = """\
You are {{{agent_name}}}, an agent taking part in the ChaosChain network.
{{{bio}}}

=== RECENT MESSAGES ===
{{{recent_messages}}}
=== END MESSAGES ===
"""


REGISTER_AGENT_TEMPLATE = _HEADER + """
Extract the details of the agent the user wants to register from the most
recent message:
- name: the agent's name
- personality: a list of personality traits
- style: the agent's communication style
- stake_amount: how many tokens to stake (a number, zero or more)
- role: either "validator" or "producer"

Only use values stated in the conversation.
"""

GET_NETWORK_STATUS_TEMPLATE = _HEADER + """
The user wants to know the current status of the ChaosChain network.
No arguments are needed.
"""

SUBMIT_VOTE_TEMPLATE = _HEADER + """
Extract the block validation vote from the most recent message:
- block_height: the height of the block being voted on (an integer, zero or more)
- approved: true if the block is approved, false otherwise
- reason: why the block is approved or rejected
- meme_url: a meme URL if one was given
"""

PROPOSE_BLOCK_TEMPLATE = _HEADER + """
Extract the block proposal from the most recent message:
- transactions: the list of transactions to include (at least one)
- drama_level: how dramatic the block is, from 1 to 10
- justification: why the block should be accepted, if given
"""

GET_AGENT_STATUS_TEMPLATE = _HEADER + """
The user wants to know the status of their registered agent, including its
drama score and validations. No arguments are needed.
"""

PROPOSE_ALLIANCE_TEMPLATE = _HEADER + """
Extract the alliance proposal from the most recent message:
- name: the name of the alliance
- purpose: what the alliance is for
- ally_ids: the IDs of the agents in the alliance (at least two different agents)
- drama_commitment: the drama commitment level, from 1 to 10
"""


TEMPLATES: Mapping[CommandKind, str] = {
    CommandKind.REGISTER_AGENT: REGISTER_AGENT_TEMPLATE,
    CommandKind.GET_NETWORK_STATUS: GET_NETWORK_STATUS_TEMPLATE,
    CommandKind.SUBMIT_VOTE: SUBMIT_VOTE_TEMPLATE,
    CommandKind.PROPOSE_BLOCK: PROPOSE_BLOCK_TEMPLATE,
    CommandKind.GET_AGENT_STATUS: GET_AGENT_STATUS_TEMPLATE,
    CommandKind.PROPOSE_ALLIANCE: PROPOSE_ALLIANCE_TEMPLATE,
}
