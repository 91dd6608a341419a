import os
import sys
from abc import ABC, abstractmethod

from ..config import carregar_cedentes
from ..state import carregar_estado
from ..log import salvar_arquivo_cnab

# caminhos de config e estado configuráveis via variáveis de ambiente
CONFIG_FILE = os.environ.get("CNAB_CONFIG", "cnab-cobranca.conf.ini")
STATE_FILE = os.environ.get("CNAB_STATE", ".state.json")


class CliBlueprint(ABC):
    """Base para todos os grupos de comandos CLI. Cada subclasse registra seus subcomandos."""

    @abstractmethod
    def register(self, subparsers, parser) -> None:
        """Registra os subcomandos no argparse. parser é o parser raiz."""
        ...


# ---------------------------------------------------------------------------
# Helpers de contexto e I/O compartilhados por todos os blueprints
# ---------------------------------------------------------------------------

def _carregar(args):
    cedentes = carregar_cedentes(CONFIG_FILE)
    nome = args.cedente
    if nome not in cedentes:
        print(f"Erro: cedente '{nome}' nao encontrado.")
        print(f"Cedentes disponiveis: {', '.join(cedentes.keys())}")
        sys.exit(1)
    estado = carregar_estado(STATE_FILE)
    return cedentes[nome], estado


def _ler_arquivo(caminho: str) -> str:
    """Le arquivo CNAB preservando CR/LF. Bancos enviam latin-1."""
    try:
        with open(caminho, encoding="latin-1", newline="") as f:
            return f.read()
    except OSError as e:
        print(f"Erro: nao foi possivel ler {caminho}: {e}")
        sys.exit(1)


def _salvar_arquivo(pasta: str, nome: str, conteudo: str) -> str:
    """Cria a pasta e salva o arquivo sem traduzir quebras de linha. Retorna o caminho."""
    os.makedirs(pasta, exist_ok=True)
    caminho = os.path.join(pasta, nome)
    with open(caminho, "w", encoding="ascii", newline="") as f:
        f.write(conteudo)
    return caminho


def _arquivar(conteudo: str, operacao: str, ref: str) -> str:
    """Wrapper sobre log.salvar_arquivo_cnab()."""
    return salvar_arquivo_cnab(conteudo, operacao, ref)
