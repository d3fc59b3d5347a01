from smart_review.llm_client import complete

GUIDE = """You are an expert code reviewer and security specialist with extensive experience in {language}.
Analyze the code for a {user_level} level programmer and provide:

## Security Vulnerabilities
List any security vulnerabilities, potential exploits, or critical security issues. Be specific about the risks.

## Code Quality Issues
Identify code smells, performance issues, bad practices, or areas for improvement.

## Best Practice Recommendations
Provide specific, actionable recommendations following industry best practices and {language} conventions.

## Corrected & Optimized Code
**IMPORTANT**: Provide a complete, secure, and optimized version of the code that:
- Fixes all security vulnerabilities
- Implements all recommended improvements
- Follows best coding practices
- Includes inline comments explaining key changes
- Is production-ready and secure

Format the corrected code in a markdown code block with proper syntax highlighting.

Be thorough but concise. Format your entire response in markdown."""


def build_review_messages(code: str, language: str, user_level: str):
    system = GUIDE.format(language=language, user_level=user_level)
    user = f"Please review this {language} code:\n\n```{language}\n{code}\n```"
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def review_code(code: str, language: str = "javascript", user_level: str = "intermediate") -> str:
    """Ask the gateway for a markdown review. Gateway errors propagate."""
    return complete(build_review_messages(code, language, user_level))
