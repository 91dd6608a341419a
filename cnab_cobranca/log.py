import logging
import os
from datetime import datetime, timedelta

from .formatacao import agora_brt

# diretório de log configurável via variável de ambiente
LOG_DIR = os.environ.get("CNAB_LOG_DIR", "log")
LOG_RETENCAO_DIAS = 7


def _limpar_logs_antigos():
    limite = agora_brt().replace(tzinfo=None) - timedelta(days=LOG_RETENCAO_DIAS)
    for nome in os.listdir(LOG_DIR):
        caminho = os.path.join(LOG_DIR, nome)
        if os.path.isfile(caminho):
            modificado = datetime.fromtimestamp(os.path.getmtime(caminho))
            if modificado < limite:
                try:
                    os.remove(caminho)
                except OSError as e:
                    logging.warning("Nao foi possivel remover log %s: %s", caminho, e)


def salvar_arquivo_cnab(conteudo: str, operacao: str, identificador: str = "") -> str:
    """Arquiva em LOG_DIR uma copia do arquivo CNAB gerado ou recebido."""
    os.makedirs(LOG_DIR, exist_ok=True)
    _limpar_logs_antigos()
    timestamp = agora_brt().strftime("%Y%m%d-%H%M%S")
    sufixo = f"-{identificador}" if identificador else ""
    arquivo = f"{LOG_DIR}/{operacao}{sufixo}-{timestamp}.txt"
    with open(arquivo, "w", encoding="latin-1", newline="") as f:
        f.write(conteudo)
    return arquivo
