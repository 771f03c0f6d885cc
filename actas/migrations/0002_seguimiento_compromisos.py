from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


ESTADOS_COMPROMISO = [('pendiente', 'Pendiente'), ('cumplido', 'Cumplido'), ('no_cumplido', 'No cumplido')]


class Migration(migrations.Migration):

    dependencies = [
        ('actas', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AddField(
            model_name='compromisoacta',
            name='estado',
            field=models.CharField(choices=ESTADOS_COMPROMISO, default='pendiente', max_length=15),
        ),
        migrations.AddField(
            model_name='compromisoacta',
            name='detalle_actualizacion',
            field=models.TextField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='compromisoacta',
            name='actualizado_en',
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='compromisoacta',
            name='actualizado_por',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='compromisos_actualizados', to=settings.AUTH_USER_MODEL),
        ),
        migrations.AlterField(
            model_name='historialacta',
            name='tipo_evento',
            field=models.CharField(choices=[('creacion', 'Creación'), ('edicion', 'Edición'), ('envio_aprobacion', 'Envío a aprobación'), ('aprobacion_participante', 'Aprobación de integrante'), ('aprobacion', 'Acta aprobada'), ('envio_correo', 'Envío por correo'), ('documento', 'Documento adjuntado')], max_length=30),
        ),
        migrations.CreateModel(
            name='CompromisoActaHistorial',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('estado_anterior', models.CharField(blank=True, choices=ESTADOS_COMPROMISO, max_length=15, null=True)),
                ('estado_nuevo', models.CharField(choices=ESTADOS_COMPROMISO, max_length=15)),
                ('detalle', models.TextField(blank=True, null=True)),
                ('creado_en', models.DateTimeField(auto_now_add=True)),
                ('compromiso', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='historial', to='actas.compromisoacta')),
                ('creado_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['creado_en', 'id'],
            },
        ),
    ]
