"""
Translator Adapter
==================

Turns an utterance into raw SQL text through the configured LLM. One prompt
template serves both privilege levels; the privilege flag decides which
rules and few-shot examples are rendered into it.
"""

from typing import Callable

import structlog

from sql_chat.llm.base import LLMInterface

logger = structlog.get_logger(__name__)

PROMPT_TEMPLATE = """Generate SQL for employee database (SQLite). Columns: Id, Name, Department, Salary, HireDate

Schema:
{schema}

Rules:
{rules}

{examples}

Q: {utterance}
A: """

COMMON_RULES = (
    "- Do NOT guess or assume values not explicitly mentioned",
    "- SQLite: Use DATETIME('now') not NOW() for current timestamp",
    "- SQLite: Use DATE('now') for current date",
    "- Use LIKE for date searches with format 'YYYY-MM-DD'",
    "- Return ONLY one SQL statement, no explanations",
)

WRITE_RULES = (
    "- INSERT: Only specify columns with values. No Id column. Use defaults for unspecified fields.",
    "- UPDATE: Change existing records",
    "- DELETE: Remove records completely",
)

READ_ONLY_RULES = (
    "- The user has read-only access: generate only SELECT statements",
)

READ_EXAMPLES = (
    ("Show me all employees", "SELECT * FROM Employees"),
    ("List employees by department", "SELECT Name, Department, Salary FROM Employees ORDER BY Department, Name"),
    ("What's the average salary in Engineering?",
     "SELECT AVG(Salary) AS AverageSalary FROM Employees WHERE Department = 'Engineering'"),
    ("Who was hired most recently?", "SELECT Name, Department, HireDate FROM Employees ORDER BY HireDate DESC LIMIT 5"),
    ("Show employees hired in 2022",
     "SELECT Name, Department, Salary, HireDate FROM Employees WHERE HireDate LIKE '2022-%'"),
    ("Show employees hired this month",
     "SELECT Name, Department, HireDate FROM Employees "
     "WHERE DATE(HireDate) BETWEEN DATE('now', 'start of month') AND DATE('now')"),
    ("Show employees hired in the last 30 days",
     "SELECT Name, Department, HireDate FROM Employees WHERE DATE(HireDate) >= DATE('now', '-30 days')"),
    ("Show employees hired last month",
     "SELECT Name, Department, HireDate FROM Employees "
     "WHERE DATE(HireDate) BETWEEN DATE('now', 'start of month', '-1 month') AND DATE('now', 'start of month', '-1 day')"),
)

WRITE_EXAMPLES = (
    ("Add new employee John Smith to Engineering with salary 75000",
     "INSERT INTO Employees (Name, Department, Salary) VALUES ('John Smith', 'Engineering', 75000)"),
    ("Add new employee Jane Doe to Marketing",
     "INSERT INTO Employees (Name, Department) VALUES ('Jane Doe', 'Marketing')"),
    ("Add employee Mike Wilson", "INSERT INTO Employees (Name) VALUES ('Mike Wilson')"),
    ("Assign Grace Wilson to the HR department and give her a salary of 51000",
     "UPDATE Employees SET Department = 'HR', Salary = 51000 WHERE Name = 'Grace Wilson'"),
    ("Give Alice Johnson a raise to 100000", "UPDATE Employees SET Salary = 100000 WHERE Name = 'Alice Johnson'"),
    ("Promote Sarah Davis to manager with salary 95000",
     "UPDATE Employees SET Salary = 95000 WHERE Name = 'Sarah Davis'"),
    ("Transfer Mike Johnson to Sales", "UPDATE Employees SET Department = 'Sales' WHERE Name = 'Mike Johnson'"),
    ("Fire Bob Smith", "DELETE FROM Employees WHERE Name = 'Bob Smith'"),
    ("Let go of Diana Prince due to budget cuts", "DELETE FROM Employees WHERE Name = 'Diana Prince'"),
    ("John Wilson was laid off", "DELETE FROM Employees WHERE Name = 'John Wilson'"),
)


def render_examples(examples) -> str:
    return "\n\n".join(f"Q: {question}\nA: {answer}" for question, answer in examples)


class Translator:
    """Natural-language-to-SQL translation through an LLM."""

    def __init__(self, llm: LLMInterface, schema_description: str | Callable[[], str] = "") -> None:
        """
        Initialize the translator.

        Args:
            llm: LLM used for generation
            schema_description: Schema text, or a callable re-reading it from
                the store on every request
        """
        self.llm = llm
        self.schema_description = schema_description

    def _schema(self) -> str:
        if callable(self.schema_description):
            return self.schema_description()
        return self.schema_description

    def build_prompt(self, utterance: str, privileged: bool) -> str:
        """Render the prompt for a caller's privilege level."""
        if privileged:
            rules = WRITE_RULES + COMMON_RULES
            examples = READ_EXAMPLES + WRITE_EXAMPLES
        else:
            rules = READ_ONLY_RULES + COMMON_RULES
            examples = READ_EXAMPLES

        return PROMPT_TEMPLATE.format(
            schema=self._schema().strip(),
            rules="\n".join(rules),
            examples=render_examples(examples),
            utterance=utterance.strip(),
        )

    def translate(self, utterance: str, privileged: bool) -> str:
        """
        Translate an utterance into raw model output.

        Raises:
            TranslationError: If the LLM call fails or times out
        """
        prompt = self.build_prompt(utterance, privileged)
        response = self.llm.generate(prompt)
        logger.debug("translated", model=response.model, privileged=privileged, output=response.content)
        return response.content.strip()
