"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Formularios del módulo de actas: datos del acta, integrantes y
               compromisos (formsets), subida de documentos y el formulario
               público con el que un integrante aprueba (foto opcional) y el
               cambio de estado de un compromiso.
--------------------------------------------------------------------------------
"""
from django import forms
from django.forms import formset_factory

from .estados import EstadoCompromiso
from .models import Acta, ActaIntegrante


class ActaForm(forms.ModelForm):
    class Meta:
        model = Acta
        fields = ["fecha", "objetivo", "contenido"]
        widgets = {
            "fecha": forms.DateInput(attrs={"type": "date"}),
            "contenido": forms.Textarea(attrs={"rows": 10}),
        }


class IntegranteForm(forms.Form):
    nombre = forms.CharField(max_length=150)
    email = forms.EmailField()
    cargo = forms.CharField(max_length=120, required=False)
    tipo = forms.ChoiceField(choices=ActaIntegrante.Tipo.choices, initial=ActaIntegrante.Tipo.EXTERNO)
    solicitar_aprobacion = forms.BooleanField(required=False, initial=True)


class BaseIntegranteFormSet(forms.BaseFormSet):
    def clean(self):
        super().clean()
        if any(self.errors):
            return
        vistos = set()
        for form in self.forms:
            if not form.cleaned_data or form.cleaned_data.get("DELETE"):
                continue
            email = form.cleaned_data["email"].lower()
            if email in vistos:
                raise forms.ValidationError(f"El correo {email} está repetido.")
            vistos.add(email)


IntegranteFormSet = formset_factory(
    IntegranteForm, formset=BaseIntegranteFormSet, extra=2, can_delete=True
)


class CompromisoForm(forms.Form):
    descripcion = forms.CharField(widget=forms.Textarea(attrs={"rows": 2}))
    fecha_limite = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    responsable_email = forms.EmailField(required=False, label="Correo del responsable")


CompromisoFormSet = formset_factory(CompromisoForm, extra=1, can_delete=True)


def datos_de_formset(formset) -> list[dict]:
    """cleaned_data de los formularios llenos y no marcados para borrar."""
    return [
        {k: v for k, v in form.cleaned_data.items() if k != "DELETE"}
        for form in formset.forms
        if form.cleaned_data and not form.cleaned_data.get("DELETE")
    ]


class DocumentoForm(forms.Form):
    archivo = forms.FileField()


class AprobacionParticipanteForm(forms.Form):
    acta = forms.CharField(widget=forms.HiddenInput)
    integrante = forms.CharField(widget=forms.HiddenInput)
    firma = forms.CharField(widget=forms.HiddenInput)
    # El archivo vacío lo rechaza el servicio con un mensaje propio
    foto = forms.FileField(required=False, allow_empty_file=True, label="Foto (opcional)")


class CompromisoEstadoForm(forms.Form):
    estado = forms.ChoiceField(choices=EstadoCompromiso.choices)
    detalle = forms.CharField(required=False, max_length=2000, widget=forms.Textarea(attrs={"rows": 2}))


def iniciales_de_acta(acta) -> tuple[list[dict], list[dict]]:
    """Datos iniciales de los formsets al editar un borrador."""
    integrantes = [
        {
            "nombre": i.nombre,
            "email": i.email,
            "cargo": i.cargo,
            "tipo": i.tipo,
            "solicitar_aprobacion": i.solicitar_aprobacion,
        }
        for i in acta.integrantes.all()
    ]
    compromisos = [
        {
            "descripcion": c.descripcion,
            "fecha_limite": c.fecha_limite,
            "responsable_email": c.responsable.email if c.responsable_id else "",
        }
        for c in acta.compromisos.select_related("responsable")
    ]
    return integrantes, compromisos
