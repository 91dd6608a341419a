from itertools import cycle

PESOS_MODULO11 = (2, 3, 4, 5, 6, 7, 8, 9)
PESOS_MODULO10 = (2, 1)


def modulo11(numero: str) -> str:
    """DV de modulo 11 no padrao FEBRABAN para codigo de barras.

    Resultados 0, 10 e 11 viram '1' (regra do codigo de barras, diferente
    do modulo 11 de CPF/CNPJ). Nao valida o conjunto de caracteres.
    """
    soma = sum(int(d) * p for d, p in zip(reversed(numero), cycle(PESOS_MODULO11)))
    dv = 11 - soma % 11
    if dv in (0, 10, 11):
        return "1"
    return str(dv)


def modulo10(numero: str) -> str:
    """DAC de modulo 10 dos campos da linha digitavel."""
    soma = 0
    for d, p in zip(reversed(numero), cycle(PESOS_MODULO10)):
        produto = int(d) * p
        if produto > 9:
            produto = produto // 10 + produto % 10
        soma += produto
    resto = soma % 10
    return "0" if resto == 0 else str(10 - resto)
