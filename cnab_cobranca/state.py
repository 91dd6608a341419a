import fcntl
import json
import os
from pathlib import Path


def carregar_estado(state_file: str) -> dict:
    path = Path(state_file)
    if not path.exists():
        return {}
    with open(path) as f:
        fcntl.flock(f, fcntl.LOCK_SH)
        try:
            conteudo = f.read()
            return json.loads(conteudo) if conteudo.strip() else {}
        finally:
            fcntl.flock(f, fcntl.LOCK_UN)


def salvar_estado(state_file: str, estado: dict) -> None:
    with open(state_file, "a+") as f:
        fcntl.flock(f, fcntl.LOCK_EX)
        try:
            f.seek(0)
            f.truncate()
            f.write(json.dumps(estado, indent=2, ensure_ascii=False) + "\n")
            f.flush()
            os.fsync(f.fileno())
        finally:
            fcntl.flock(f, fcntl.LOCK_UN)


def _chave_sequencial(banco: str, convenio: str) -> str:
    return f"{banco}:{convenio or '-'}"


def get_ultimo_sequencial(estado: dict, banco: str, convenio: str) -> int:
    return estado.get("remessas", {}).get(_chave_sequencial(banco, convenio), 0)


def set_ultimo_sequencial(estado: dict, banco: str, convenio: str, sequencial: int) -> None:
    estado.setdefault("remessas", {})[_chave_sequencial(banco, convenio)] = sequencial
