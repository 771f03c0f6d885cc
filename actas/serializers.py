"""
--------------------------------------------------------------------------------
Integrantes:           Matias Pinilla, Herna Leris, Kassandra Ramos
Fecha de Modificación: 18/10/2026
Descripción:   Serializadores de la API de actas. Nunca exponen firmas ni
               rutas internas del almacenamiento.
--------------------------------------------------------------------------------
"""
from rest_framework import serializers

from .models import Acta, ActaIntegrante, CompromisoActa, CompromisoActaHistorial, DocumentoActa


class IntegranteSerializer(serializers.ModelSerializer):
    estado_aprobacion = serializers.CharField(source="aprobacion.estado", read_only=True)
    aprobado_en = serializers.DateTimeField(source="aprobacion.aprobado_en", read_only=True)
    tiene_foto = serializers.SerializerMethodField()

    class Meta:
        model = ActaIntegrante
        fields = [
            "id", "nombre", "email", "cargo", "tipo", "solicitar_aprobacion",
            "estado_aprobacion", "aprobado_en", "tiene_foto",
        ]

    def get_tiene_foto(self, obj):
        aprobacion = getattr(obj, "aprobacion", None)
        return bool(aprobacion and aprobacion.ruta_foto)


class CompromisoHistorialSerializer(serializers.ModelSerializer):
    creado_por = serializers.CharField(source="creado_por.username", read_only=True, allow_null=True)

    class Meta:
        model = CompromisoActaHistorial
        fields = ["estado_anterior", "estado_nuevo", "detalle", "creado_en", "creado_por"]


class CompromisoSerializer(serializers.ModelSerializer):
    semaforo = serializers.CharField(read_only=True)
    texto_fecha_limite = serializers.CharField(read_only=True)
    responsable = serializers.CharField(source="responsable.nombre", read_only=True, allow_null=True)
    historial = CompromisoHistorialSerializer(many=True, read_only=True)

    class Meta:
        model = CompromisoActa
        fields = [
            "id", "descripcion", "fecha_limite", "responsable", "semaforo", "texto_fecha_limite",
            "estado", "detalle_actualizacion", "actualizado_en", "historial",
        ]


class DocumentoSerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentoActa
        fields = ["id", "nombre_original", "mime_type", "tamano", "creado_en"]


class ActaSerializer(serializers.ModelSerializer):
    creado_por = serializers.CharField(source="creado_por.username", read_only=True)

    class Meta:
        model = Acta
        fields = ["id", "serial", "fecha", "objetivo", "estado", "creado_por", "creado_en", "aprobada_en"]


class ActaDetalleSerializer(ActaSerializer):
    integrantes = IntegranteSerializer(many=True, read_only=True)
    compromisos = CompromisoSerializer(many=True, read_only=True)
    documentos = DocumentoSerializer(many=True, read_only=True)
    resumen_aprobaciones = serializers.SerializerMethodField()

    class Meta(ActaSerializer.Meta):
        fields = ActaSerializer.Meta.fields + [
            "contenido", "integrantes", "compromisos", "documentos", "resumen_aprobaciones",
        ]

    def get_resumen_aprobaciones(self, obj):
        return obj.resumen_aprobaciones()
