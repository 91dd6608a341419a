class CnabError(Exception):
    """Base para todos os erros do codec CNAB240 / boleto."""


class CnabStructuralError(CnabError):
    """Tamanho fixo errado ou caracteres nao numericos onde so cabem digitos."""


class CnabValidationError(CnabError):
    """Dado de entrada fora do dominio aceito pelo banco ou pelo layout."""


class CnabIntegrityError(CnabError):
    """Digito verificador nao confere."""


class CnabConfigError(CnabError):
    """Arquivo de configuracao ausente, incompleto ou invalido."""
