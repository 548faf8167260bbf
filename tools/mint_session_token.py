from datetime import timedelta
import sys

from app.core.auth import create_session_token

# Uso: python -m tools.mint_session_token <subject_id> [horas]
sub = sys.argv[1] if len(sys.argv) > 1 else "u1"
hours = int(sys.argv[2]) if len(sys.argv) > 2 else 24
print(create_session_token(sub, ttl=timedelta(hours=hours)))
