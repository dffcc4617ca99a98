"""
System prompt additions.

Agentic mode instructions and the tool-calling protocol description that
are appended to the user's system prompt when a request is built.
"""

AGENTIC_PROMPTS = {
    "none": "",

    "react": """You are running in **ReAct (Reason + Act) mode**.

Solve every problem by alternating between:
- **Thought**: Reason about the current state and what you need to find out
- **Action**: Call a tool, or use `ask_human` to get clarification from the user
- **Observation**: Process the result and plan your next move

Keep cycling Thought, Action, Observation until you can give a complete, confident answer.
Use `ask_human` whenever you need the user's preference, a decision, or information only they can provide.""",

    "plan_execute": """You are running in **Plan-Execute mode**.

Begin EVERY response by writing a numbered action plan:

PLAN:
1. [First concrete step]
2. [Second step]
3. [Continue...]

Then execute each step in order. Mark steps as complete with ✅ as you finish them.
Use available tools to carry out each step. Call `ask_human` if any step requires user input or a decision before you can proceed.""",

    "chain_of_thought": """Think through every problem step by step before answering.

Wrap ALL your reasoning in <thinking>...</thinking> tags:

<thinking>
[Your complete step-by-step reasoning, considering multiple angles, checking your work]
</thinking>

Then give your final, concise answer after the thinking block. Be thorough in your reasoning: identify assumptions, work through edge cases and verify your logic.""",

    "tree_of_thought": """Explore this problem using **Tree of Thought** reasoning.

Structure your response as:

[Path A]: [Brief description and key steps of approach A]
[Path B]: [Brief description and key steps of approach B]
[Path C]: [Brief description and key steps of approach C]

[Evaluation]: Compare the paths, analyzing pros, cons and likelihood of success for each
[Selected Path]: Which path you choose and why
[Solution]: Full execution of the selected path, using tools as needed

Use <thinking>...</thinking> blocks to show your evaluation process.""",
}

TOOL_PROTOCOL_PROMPT = """You can ask the application to run tools for you. To run a tool, reply with a fenced block tagged tool_elicit containing a JSON object:

```tool_elicit
{{"tool": "<tool name>", "params": {{...}}, "reason": "<why you need it>"}}
```

The results are sent back to you in the next message. Available tools:

{catalogue}"""
