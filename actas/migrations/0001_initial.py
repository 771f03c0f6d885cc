from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Acta',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('serial', models.PositiveIntegerField(editable=False, unique=True)),
                ('fecha', models.DateField(verbose_name='Fecha de la reunión')),
                ('objetivo', models.CharField(max_length=255)),
                ('contenido', models.TextField(blank=True, default='')),
                ('estado', models.CharField(choices=[('borrador', 'Borrador'), ('pendiente_aprobacion', 'Pendiente de aprobación'), ('aprobada', 'Aprobada'), ('enviada', 'Enviada')], default='borrador', max_length=25)),
                ('creado_en', models.DateTimeField(auto_now_add=True)),
                ('actualizado_en', models.DateTimeField(auto_now=True)),
                ('aprobada_en', models.DateTimeField(blank=True, null=True)),
                ('creado_por', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='actas_creadas', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-creado_en'],
            },
        ),
        migrations.CreateModel(
            name='ActaIntegrante',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nombre', models.CharField(max_length=150)),
                ('email', models.EmailField(max_length=254)),
                ('cargo', models.CharField(blank=True, default='', max_length=120)),
                ('tipo', models.CharField(choices=[('interno', 'Interno'), ('externo', 'Externo')], default='externo', max_length=10)),
                ('solicitar_aprobacion', models.BooleanField(default=True, help_text='Si está marcado, el acta no se aprueba sin su aprobación.')),
                ('acta', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='integrantes', to='actas.acta')),
                ('usuario', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='participaciones_acta', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='AprobacionActa',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('estado', models.CharField(choices=[('pendiente', 'Pendiente'), ('aprobada', 'Aprobada')], default='pendiente', max_length=10)),
                ('aprobado_en', models.DateTimeField(blank=True, null=True)),
                ('ruta_foto', models.CharField(blank=True, max_length=500, null=True)),
                ('foto_mime', models.CharField(blank=True, max_length=50, null=True)),
                ('firma_usada', models.CharField(blank=True, default='', max_length=64)),
                ('acta', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='aprobaciones', to='actas.acta')),
                ('integrante', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='aprobacion', to='actas.actaintegrante')),
            ],
        ),
        migrations.AddConstraint(
            model_name='aprobacionacta',
            constraint=models.UniqueConstraint(fields=('acta', 'integrante'), name='aprobacion_unica_por_integrante'),
        ),
        migrations.CreateModel(
            name='DocumentoActa',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nombre_original', models.CharField(max_length=255)),
                ('archivo', models.CharField(max_length=500)),
                ('mime_type', models.CharField(max_length=150)),
                ('tamano', models.PositiveIntegerField()),
                ('creado_en', models.DateTimeField(auto_now_add=True)),
                ('acta', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='documentos', to='actas.acta')),
                ('subido_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['creado_en'],
            },
        ),
        migrations.CreateModel(
            name='CompromisoActa',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('descripcion', models.TextField()),
                ('fecha_limite', models.DateField(blank=True, null=True)),
                ('acta', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='compromisos', to='actas.acta')),
                ('responsable', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='compromisos', to='actas.actaintegrante')),
            ],
            options={
                'ordering': ['fecha_limite', 'id'],
            },
        ),
        migrations.CreateModel(
            name='HistorialActa',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tipo_evento', models.CharField(choices=[('creacion', 'Creación'), ('envio_aprobacion', 'Envío a aprobación'), ('aprobacion_participante', 'Aprobación de integrante'), ('aprobacion', 'Acta aprobada'), ('envio_correo', 'Envío por correo'), ('documento', 'Documento adjuntado')], max_length=30)),
                ('fecha', models.DateTimeField(default=django.utils.timezone.now)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('acta', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='historial', to='actas.acta')),
                ('usuario', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['fecha', 'id'],
            },
        ),
    ]
